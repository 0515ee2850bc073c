DEFAULT_ROULETTE_TITLE = "누가 쏴?"
GPS_LOCATION_NAME = "현재 위치"
MIDPOINT_LABEL = "중간지점"
KAKAO_MAP_LINK_URL = "https://map.kakao.com/link/map"

HOST_TOKEN_KEY_PREFIX = "moyeora_host_"
NICKNAME_KEY_PREFIX = "moyeora_nickname_"
HOST_TOKEN_HEADER = "X-Host-Token"

MIN_ROULETTE_PARTICIPANTS = 2
ROULETTE_BASE_STEPS = 20
ROULETTE_START_DELAY_MS = 50
ROULETTE_DELAY_STEP_MS = 10

LOCATION_SOURCE_GPS = "gps"
LOCATION_SOURCE_MANUAL = "manual"
LOCATION_SOURCE_CHOICES = [
    (LOCATION_SOURCE_GPS, "Device location"),
    (LOCATION_SOURCE_MANUAL, "Typed address"),
]

GEOCODE_MISS_WARNING = "정확한 좌표를 찾지 못했습니다. 중간지점 계산에서 제외될 수 있어요."
