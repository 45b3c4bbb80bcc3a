"""
Line-item output fields.

``OUTPUT_FIELDS`` is the fixed catalog a template can select from, in display
order. Each key has a formatter in ``FIELD_FORMATTERS``; new fields are added
with the ``field_formatter`` decorator. ``resolve_field_value`` never raises:
missing, blank or unknown values render as ``PLACEHOLDER``.
"""

from typing import Any, Callable, Dict, List, Mapping, Tuple

from contracts_api.utils.numbers import to_number, format_number

PLACEHOLDER = "-"
SERVICE_ITEM_LABEL = "*서비스 상품입니다."

OUTPUT_FIELDS: List[Tuple[str, str]] = [
    ("brand", "브랜드"),
    ("space", "공간"),
    ("productCode", "제품코드"),
    ("productType", "제품종류"),
    ("curtainType", "커튼종류"),
    ("pleatType", "주름방식"),
    ("productName", "제품명"),
    ("width", "폭"),
    ("details", "세부내용"),
    ("widthMM", "가로"),
    ("heightMM", "세로"),
    ("area", "면적"),
    ("lineDir", "줄방향"),
    ("lineLen", "줄길이"),
    ("pleatAmount", "주름양"),
    ("widthCount", "폭수"),
    ("quantity", "수량"),
    ("totalPrice", "금액"),
]

FIELD_LABELS: Dict[str, str] = dict(OUTPUT_FIELDS)

FieldFormatter = Callable[[Any], str]

FIELD_FORMATTERS: Dict[str, FieldFormatter] = {}


def field_formatter(*keys: str):
    """Register the decorated function as the formatter for ``keys``."""
    def decorator(func: FieldFormatter) -> FieldFormatter:
        for key in keys:
            FIELD_FORMATTERS[key] = func
        return func
    return decorator


@field_formatter(
    "brand", "space", "productCode", "productType", "curtainType",
    "pleatType", "productName", "width", "details", "lineDir",
)
def format_text(value: Any) -> str:
    return str(value).strip()


def measure_formatter(unit: str) -> FieldFormatter:
    """Numbers get thousands separators and ``unit``; zero is treated as absent."""
    def format_measure(value: Any) -> str:
        number = to_number(value)
        if number is None:
            return str(value).strip()
        if number == 0:
            return PLACEHOLDER
        return f"{format_number(number)}{unit}"
    return format_measure


for _key, _unit in (
    ("widthMM", "mm"),
    ("heightMM", "mm"),
    ("area", "㎡"),
    ("lineLen", "cm"),
    ("pleatAmount", ""),
    ("widthCount", "폭"),
    ("quantity", ""),
):
    FIELD_FORMATTERS[_key] = measure_formatter(_unit)


@field_formatter("totalPrice")
def format_price(value: Any) -> str:
    number = to_number(value)
    if number is None:
        return PLACEHOLDER
    if number == 0:
        return SERVICE_ITEM_LABEL
    return f"{format_number(number)}원"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_field_value(row: Mapping[str, Any] | None, field_key: str) -> str:
    """Formatted value of ``field_key`` on a line item."""
    formatter = FIELD_FORMATTERS.get(field_key)
    if formatter is None or not isinstance(row, Mapping):
        return PLACEHOLDER
    value = row.get(field_key)
    if _is_blank(value):
        return PLACEHOLDER
    return formatter(value) or PLACEHOLDER


def field_label(field_key: str) -> str:
    """Column label; keys outside the catalog are shown as-is."""
    return FIELD_LABELS.get(field_key, field_key)


def all_field_keys() -> List[str]:
    return [key for key, _ in OUTPUT_FIELDS]
