from sqlmodel import Session

from pharmia.core.config import settings
from pharmia.db.session import engine, init_db
from pharmia.db.seed import DEFAULT_SEED_PATH, seed_all


def run_seed():
    init_db()
    with Session(engine) as session:
        seed_all(session, DEFAULT_SEED_PATH, bcrypt_rounds=settings.BCRYPT_ROUNDS)


if __name__ == "__main__":
    run_seed()
