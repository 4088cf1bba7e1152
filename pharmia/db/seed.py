"""
➡️ But : Peupler une base de développement depuis un fichier YAML.

seed_all() insère, si les tables sont vides : les comptes (admin, formateur, pharmacien, préparateur),
des mémofiches d'exemple (validées par les schémas de l'API) et des abonnés newsletter.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from sqlmodel import Session, select

from pharmia.db.models.memofiches import MemoFiche
from pharmia.db.models.subscribers import Subscriber
from pharmia.db.models.users import User, UserRole
from pharmia.features.memofiches.schemas import MemoFicheCreate
from pharmia.security.password import hash_password

DEFAULT_SEED_PATH = Path(__file__).resolve().parent / "seed_data.yaml"


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Seed Users
# -----------------------------
def seed_users(session: Session, data: Dict[str, Any], *, bcrypt_rounds: Optional[int] = None) -> None:
    if session.exec(select(User)).first():
        print("ℹ️ Les utilisateurs existent déjà, aucune insertion effectuée.")
        return

    users: List[Dict[str, Any]] = data.get("users", [])
    if not users:
        print("⚠️ Aucun utilisateur dans le YAML (clé 'users').")
        return

    # les préparateurs référencent leur pharmacien par sa clé YAML : pharmaciens d'abord
    by_key: Dict[str, User] = {}
    ordered = sorted(users, key=lambda u: u.get("pharmacist_key") is not None)
    for u in ordered:
        pharmacist = by_key.get(u["pharmacist_key"]) if u.get("pharmacist_key") else None
        user = User(
            username=u["username"],
            email=u["email"].lower() if u.get("email") else None,
            hashed_password=hash_password(u["password"], bcrypt_rounds) if u.get("password") else None,
            role=UserRole(u.get("role", UserRole.PHARMACIEN.value)),
            first_name=u.get("first_name"),
            last_name=u.get("last_name"),
            pharmacist_id=pharmacist.id if pharmacist else None,
        )
        session.add(user)
        session.flush()
        by_key[u.get("key", u["username"])] = user
    session.commit()
    print(f"✅ {len(users)} utilisateurs insérés.")


# -----------------------------
# Seed MemoFiches
# -----------------------------
def seed_memofiches(session: Session, data: Dict[str, Any]) -> None:
    if session.exec(select(MemoFiche)).first():
        print("ℹ️ Les mémofiches existent déjà, aucune insertion effectuée.")
        return

    fiches: List[Dict[str, Any]] = data.get("memofiches", [])
    if not fiches:
        print("⚠️ Aucune mémofiche dans le YAML (clé 'memofiches').")
        return

    session.add_all([
        MemoFiche(**MemoFicheCreate.model_validate(f).model_dump(mode="json"))
        for f in fiches
    ])
    session.commit()
    print(f"✅ {len(fiches)} mémofiches insérées.")


# -----------------------------
# Seed Subscribers
# -----------------------------
def seed_subscribers(session: Session, data: Dict[str, Any]) -> None:
    if session.exec(select(Subscriber)).first():
        print("ℹ️ Les abonnés existent déjà, aucune insertion effectuée.")
        return

    subscribers: List[Dict[str, Any]] = data.get("subscribers", [])
    session.add_all([
        Subscriber(email=s["email"].lower(), groups=list(s.get("groups", [])))
        for s in subscribers
    ])
    session.commit()
    print(f"✅ {len(subscribers)} abonnés insérés.")


def seed_all(session: Session, seed_path: str | Path = DEFAULT_SEED_PATH, *, bcrypt_rounds: Optional[int] = None) -> None:
    data = load_seed_yaml(seed_path)

    seed_users(session, data, bcrypt_rounds=bcrypt_rounds)
    seed_memofiches(session, data)
    seed_subscribers(session, data)
