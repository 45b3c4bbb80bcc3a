"""
Estimate test factories.

Generates camelCase estimate documents as delivered by the estimate system.
"""

import factory
from faker import Faker

fake = Faker("ko_KR")

SPACES = ["거실", "안방", "작은방", "주방", "드레스룸"]

PRODUCTS = [
    ("커튼", "나비주름 암막커튼"),
    ("블라인드", "콤비블라인드"),
    ("커튼", "쉬폰 속커튼"),
    ("블라인드", "우드블라인드"),
]


class LineItemFactory(factory.Factory):
    """Factory for estimate line items."""

    class Meta:
        model = dict

    space = factory.LazyFunction(lambda: fake.random_element(SPACES))
    brand = factory.LazyFunction(lambda: fake.random_element(["헌터더글라스", "자체제작", "루체"]))
    productCode = factory.Sequence(lambda n: f"P-{n + 100}")
    productType = factory.LazyFunction(lambda: fake.random_element(PRODUCTS)[0])
    productName = factory.LazyFunction(lambda: fake.random_element(PRODUCTS)[1])
    widthMM = factory.LazyFunction(lambda: fake.random_int(min=800, max=4000, step=10))
    heightMM = factory.LazyFunction(lambda: fake.random_int(min=1000, max=2600, step=10))
    quantity = 1
    totalPrice = factory.LazyFunction(lambda: fake.random_int(min=10, max=90) * 10000)


class ServiceLineItemFactory(LineItemFactory):
    """Free service item (price 0)."""

    productName = "레일 설치"
    totalPrice = 0


class EstimateFactory(factory.Factory):
    """
    Factory for generating approved estimate documents.

    Usage:
        estimate = EstimateFactory()
        estimate = EstimateFactory(estimateNo="E20250101-001", totalAmount=1000000)
    """

    class Meta:
        model = dict

    estimateNo = factory.Sequence(lambda n: f"E20250101-{n + 1:03d}")
    estimateDate = "2025-01-01"
    customerName = factory.LazyFunction(fake.name)
    contact = factory.LazyFunction(lambda: fake.phone_number())
    emergencyContact = ""
    address = "서울특별시 강남구 역삼동 래미안아파트 101동 1203호"
    projectName = factory.LazyFunction(lambda: f"{fake.last_name()}님 댁 커튼 시공")
    type = "커튼"
    rows = factory.LazyFunction(lambda: LineItemFactory.create_batch(2))

    @factory.lazy_attribute
    def totalAmount(self):
        return sum(row["totalPrice"] for row in self.rows)

    discountedAmount = factory.LazyAttribute(lambda obj: obj.totalAmount)


class FinalEstimateFactory(EstimateFactory):
    """Final variant of an earlier estimate."""

    estimateNo = factory.Sequence(lambda n: f"E20250101-{n + 1:03d}-final")
