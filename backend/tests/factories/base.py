from faker import Faker as _Faker

# Shared faker instance, seeded so factory data is reproducible between runs
Faker = _Faker()
Faker.seed_instance(2026)
