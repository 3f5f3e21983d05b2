import asyncio
import random

from faker import Faker

from localretail.core.config import settings
from localretail.schemas.company import CompanySettingsUpdate
from localretail.schemas.customer import CustomerCreate
from localretail.schemas.product import ProductCreate
from localretail.schemas.route import RouteInfoCreate
from localretail.services.company_service import save_company_settings
from localretail.services.customer_service import register_customer
from localretail.services.product_service import create_product
from localretail.services.route_service import create_route
from localretail.storage.factory import build_storage

fake = Faker("en_IN")

PRODUCT_NAMES = ["Milk 500ml", "Milk 1L", "Curd 400g", "Paneer 200g", "Butter 100g", "Ghee 500ml"]


async def seed():
    storage = build_storage(settings)
    await storage.init()
    try:
        print("🔄 Creating company settings...")
        await save_company_settings(storage, CompanySettingsUpdate(
            company_name=fake.company(),
            address=fake.address().replace('\n', ', '),
            phone=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            email=fake.company_email(),
        ))

        print("🔄 Creating products...")
        products = []
        for name in PRODUCT_NAMES:
            products.append(await create_product(storage, ProductCreate(
                name=name,
                default_price=round(random.uniform(20, 300), 2),
            )))
        print(f"✅ Seeded {len(products)} products")

        print("🔄 Creating routes...")
        routes = []
        for index in range(1, random.randint(3, 5) + 1):
            routes.append(await create_route(storage, RouteInfoCreate(
                id=f"R{index:03d}",
                name=f"{fake.city()} Route",
                description=fake.sentence(),
                areas=[fake.street_name() for _ in range(3)],
                pincodes=[fake.postcode() for _ in range(2)],
            )))
        print(f"✅ Seeded {len(routes)} routes")

        print("🔄 Creating customers...")
        customers = []
        for _ in range(random.randint(20, 30)):
            # a few customers get a negotiated price on some products
            overrides = {
                product.id: round(product.default_price * random.uniform(0.85, 0.95), 2)
                for product in random.sample(products, k=random.randint(0, 2))
            }
            customers.append(await register_customer(storage, CustomerCreate(
                name=fake.name(),
                phone=''.join(filter(str.isdigit, fake.phone_number()))[:20],
                address=fake.address().replace('\n', ', '),
                route=random.choice(routes).id,
                opening_balance=random.choice([0, 0, 0, round(random.uniform(100, 2000), 2)]),
                product_prices=overrides,
            )))
        print(f"✅ Seeded {len(customers)} customers")
    finally:
        await storage.close()


if __name__ == '__main__':
    asyncio.run(seed())
