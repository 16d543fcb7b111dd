"""Default supported cities: the six special municipalities."""

from weatherproxy.config.schema import CityConfig
from weatherproxy.models.common import CityKey

DEFAULT_CITIES: list[CityConfig] = [
    CityConfig(key=CityKey.TAINAN, name="臺南市"),
    CityConfig(key=CityKey.KAOHSIUNG, name="高雄市"),
    CityConfig(key=CityKey.TAICHUNG, name="臺中市"),
    CityConfig(key=CityKey.TAIPEI, name="臺北市"),
    CityConfig(key=CityKey.TAOYUAN, name="桃園市"),
    CityConfig(key=CityKey.NEW_TAIPEI, name="新北市"),
]
