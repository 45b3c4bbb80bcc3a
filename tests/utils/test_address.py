"""
Tests for schedule-title address abbreviation.
"""

from contracts_api.utils.address import abbreviate_address


class TestAbbreviateAddress:
    """Tests for abbreviate_address."""

    def test_apartment_with_building_and_unit(self):
        address = "서울특별시 강남구 역삼동 래미안아파트 101동 1203호"
        assert abbreviate_address(address) == "래미안아파트 101-1203"

    def test_apartment_with_building_only(self):
        assert abbreviate_address("경기도 성남시 분당구 정자동 파크뷰아파트 305동") == "파크뷰아파트 305동"

    def test_apartment_with_unit_only(self):
        assert abbreviate_address("서울시 마포구 상암동 누리오피스텔 1203호") == "누리오피스텔 1203호"

    def test_complex_name_alone(self):
        assert abbreviate_address("서울시 송파구 잠실동 힐스테이트") == "힐스테이트"

    def test_neighborhood_and_lot_number(self):
        assert abbreviate_address("서울특별시 강남구 역삼동 123-4번지") == "역삼동 123-4번지"

    def test_falls_back_to_last_three_tokens(self):
        assert abbreviate_address("부산광역시 해운대구 우동 마린시티2로 33") == "우동 마린시티2로 33"

    def test_short_address_returned_whole(self):
        assert abbreviate_address("  세종시 한솔로  ") == "세종시 한솔로"

    def test_empty_address(self):
        assert abbreviate_address("") == ""
        assert abbreviate_address(None) == ""
