from app.repositories.customer import CustomerRepository

__all__ = ["CustomerRepository"]
