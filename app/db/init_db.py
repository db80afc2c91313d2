import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.models.orm import Activity, Building, Organization, OrganizationPhone
from app.db.session import engine, Base, AsyncSessionLocal

logger = logging.getLogger(__name__)

async def init_db():
    # в проде конечно лучше alembic, но для справочника сойдет и create_all
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if not settings.SEED_DEMO_DATA:
        return

    async with AsyncSessionLocal() as session:
        await seed_demo_data(session)


async def seed_demo_data(session: AsyncSession) -> bool:
    # в непустую базу ничего не льем
    result = await session.execute(select(Activity.id).limit(1))
    if result.first():
        return False

    # 1. категории, не глубже 3 уровней
    food = Activity(name="Еда", level=1)
    cars = Activity(name="Автомобили", level=1)

    meat = Activity(name="Мясная продукция", level=2, parent=food)
    milk = Activity(name="Молочная продукция", level=2, parent=food)
    trucks = Activity(name="Грузовые", level=2, parent=cars)
    passenger = Activity(name="Легковые", level=2, parent=cars)

    beef = Activity(name="Говядина", level=3, parent=meat)
    spare_parts = Activity(name="Запчасти", level=3, parent=passenger)
    accessories = Activity(name="Аксессуары", level=3, parent=passenger)
    session.add_all([food, cars])

    # 2. здания (центр москвы и рядом)
    b1 = Building(address="г. Москва, ул. Ленина 1, офис 3", latitude=55.7558, longitude=37.6173)
    b2 = Building(address="г. Москва, ул. Пушкина 2", latitude=55.751244, longitude=37.618423)
    b3 = Building(address="г. Москва, ул. Блюхера 32/1", latitude=55.8072, longitude=37.5847)

    # 3. организации с телефонами и деятельностями
    session.add_all([
        Organization(
            name="ООО Рога и Копыта",
            building=b1,
            phones=[OrganizationPhone(phone_number="2-222-222"), OrganizationPhone(phone_number="3-333-333"), OrganizationPhone(phone_number="8-923-666-13-13")],
            activities=[meat, milk],
        ),
        Organization(name="Молочный Мир", building=b2, phones=[OrganizationPhone(phone_number="8-800-555-35-35")], activities=[milk]),
        Organization(name="Мясная Лавка", building=b2, phones=[OrganizationPhone(phone_number="2-22-33")], activities=[beef]),
        Organization(name="Шиномонтаж у Ашота", building=b3, phones=[OrganizationPhone(phone_number="8-495-123-45-67")], activities=[spare_parts, accessories]),
        Organization(name="Грузовик Сервис", building=b3, phones=[], activities=[trucks]),
    ])

    await session.commit()
    logger.info("Seeded demo directory")
    return True
