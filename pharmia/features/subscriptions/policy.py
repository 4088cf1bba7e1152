"""
Règles d'accès au contenu premium.

Un utilisateur peut ouvrir une mémofiche si :
1. il est ADMIN ou FORMATEUR ;
2. il est inscrit depuis moins de `trial_days` jours (semaine gratuite) ;
3. la fiche est gratuite ;
4. son abonnement est actif et sa date de fin est dans le futur.

Les fonctionnalités qui ne portent pas sur une fiche (chat libre) appliquent 1, 2 et 4.
Fonctions pures : `now` est toujours passé explicitement.
"""

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable

from pharmia.db.models.base import utcnow
from pharmia.db.models.memofiches import MemoFiche
from pharmia.db.models.users import STAFF_ROLES, User


def is_staff(user: User) -> bool:
    return user.role in STAFF_ROLES


def in_free_trial(user: User, *, now: datetime, trial_days: int) -> bool:
    return now - user.created_at < timedelta(days=trial_days)


def has_valid_subscription(user: User, *, now: datetime) -> bool:
    return bool(
        user.has_active_subscription
        and user.subscription_end_date is not None
        and user.subscription_end_date > now
    )


def can_use_premium(user: User, *, now: datetime, trial_days: int) -> bool:
    return is_staff(user) or in_free_trial(user, now=now, trial_days=trial_days) or has_valid_subscription(user, now=now)


def can_access_fiche(user: User, fiche: MemoFiche, *, now: datetime, trial_days: int) -> bool:
    return fiche.is_free or can_use_premium(user, now=now, trial_days=trial_days)


def add_months(start: datetime, months: int) -> datetime:
    """Ajoute des mois calendaires ; le jour est ramené au dernier jour du mois si besoin (31 janv. + 1 mois → 28/29 févr.)."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


@dataclass
class AccessPolicy:
    """Politique d'accès liée à une horloge, injectée dans les services."""

    trial_days: int = 7
    now_fn: Callable[[], datetime] = field(default=utcnow)

    def can_use_premium(self, user: User) -> bool:
        return can_use_premium(user, now=self.now_fn(), trial_days=self.trial_days)

    def can_access_fiche(self, user: User, fiche: MemoFiche) -> bool:
        return can_access_fiche(user, fiche, now=self.now_fn(), trial_days=self.trial_days)
