"""
Static region -> coordinate lookup.

One representative point (the prefectural capital) per prefecture of Japan.
Keys are matched exactly; there is no fuzzy or case-insensitive matching.
"""
from typing import Dict, List, NamedTuple

from .errors import UnknownRegion


class Coordinate(NamedTuple):
    lat: float
    lon: float


PREFECTURE_COORDINATES: Dict[str, Coordinate] = {
    "北海道": Coordinate(43.0646, 141.3468),
    "青森県": Coordinate(40.8244, 140.74),
    "岩手県": Coordinate(39.7036, 141.1527),
    "宮城県": Coordinate(38.2688, 140.8721),
    "秋田県": Coordinate(39.7186, 140.1024),
    "山形県": Coordinate(38.2404, 140.3633),
    "福島県": Coordinate(37.75, 140.4676),
    "茨城県": Coordinate(36.3418, 140.4468),
    "栃木県": Coordinate(36.5657, 139.8836),
    "群馬県": Coordinate(36.3912, 139.0608),
    "埼玉県": Coordinate(35.8569, 139.6489),
    "千葉県": Coordinate(35.6047, 140.1233),
    "東京都": Coordinate(35.6895, 139.6917),
    "神奈川県": Coordinate(35.4478, 139.6425),
    "新潟県": Coordinate(37.9026, 139.0236),
    "富山県": Coordinate(36.6953, 137.2113),
    "石川県": Coordinate(36.5946, 136.6256),
    "福井県": Coordinate(36.0652, 136.2216),
    "山梨県": Coordinate(35.6642, 138.5684),
    "長野県": Coordinate(36.6513, 138.181),
    "岐阜県": Coordinate(35.3912, 136.7223),
    "静岡県": Coordinate(34.9769, 138.3831),
    "愛知県": Coordinate(35.1802, 136.9066),
    "三重県": Coordinate(34.7303, 136.5086),
    "滋賀県": Coordinate(35.0045, 135.8686),
    "京都府": Coordinate(35.0116, 135.7681),
    "大阪府": Coordinate(34.6937, 135.5023),
    "兵庫県": Coordinate(34.6913, 135.183),
    "奈良県": Coordinate(34.6851, 135.8049),
    "和歌山県": Coordinate(34.226, 135.1675),
    "鳥取県": Coordinate(35.5039, 134.2377),
    "島根県": Coordinate(35.4723, 133.0505),
    "岡山県": Coordinate(34.6618, 133.9344),
    "広島県": Coordinate(34.3966, 132.4596),
    "山口県": Coordinate(34.186, 131.4714),
    "徳島県": Coordinate(34.0658, 134.5593),
    "香川県": Coordinate(34.3401, 134.0434),
    "愛媛県": Coordinate(33.8416, 132.7657),
    "高知県": Coordinate(33.5597, 133.531),
    "福岡県": Coordinate(33.6064, 130.4183),
    "佐賀県": Coordinate(33.2494, 130.2988),
    "長崎県": Coordinate(32.7448, 129.8737),
    "熊本県": Coordinate(32.7898, 130.7417),
    "大分県": Coordinate(33.2382, 131.6126),
    "宮崎県": Coordinate(31.9111, 131.4239),
    "鹿児島県": Coordinate(31.5602, 130.5581),
    "沖縄県": Coordinate(26.2124, 127.6809),
}


def resolve(region_id: str) -> Coordinate:
    """Return the coordinate for ``region_id`` or raise :class:`UnknownRegion`."""
    try:
        return PREFECTURE_COORDINATES[region_id]
    except KeyError:
        raise UnknownRegion(region_id) from None


def list_regions() -> List[str]:
    return list(PREFECTURE_COORDINATES)
