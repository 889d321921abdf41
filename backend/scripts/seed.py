from core.config import load_settings
from db.base import Base
from db.executor import QueryExecutor
from db.session import build_engine, build_session_factory
from models import entities as _entity_models  # noqa: F401
from services.entity_repository import repository_for

SAMPLE_SERVICES = [
    {
        "title": "Deep Home Cleaning",
        "category": "cleaning",
        "description": "Kitchen, bathrooms and floors, top to bottom.",
        "providerName": "Sparkle Crew",
        "providerRating": 4.8,
        "reviewCount": 0,
        "priceRange": "$80-$150",
        "location": "Austin, TX",
    },
    {
        "title": "Leaky Faucet Repair",
        "category": "plumbing",
        "providerName": "Pipe Pros",
        "providerRating": 4.5,
        "reviewCount": 0,
        "priceRange": "$60-$120",
        "location": "Austin, TX",
    },
    {
        "title": "Interior Wall Painting",
        "category": "painting",
        "providerName": "Brush & Roll",
        "providerRating": 4.2,
        "reviewCount": 0,
        "priceRange": "$200-$600",
        "location": "Round Rock, TX",
        "availability": "busy",
    },
]


def ensure_service(repo, data: dict) -> bool:
    if repo.find_one({"title": data["title"], "providerName": data["providerName"]}) is not None:
        return False
    repo.create(data)
    return True


def main():
    settings = load_settings()
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)

    db = build_session_factory(engine)()
    try:
        repo = repository_for(QueryExecutor(db), "Service")
        created = sum(1 for service in SAMPLE_SERVICES if ensure_service(repo, service))
        db.commit()
        print(f"Seed complete. services_created={created} services_total={repo.count()}")
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    main()
