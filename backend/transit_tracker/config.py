from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    mqtt_url: str = "mqtt://test.mosquitto.org:1883"
    mqtt_topic: str = "vehicles/+/telemetry"
    mqtt_client_id: str = "transit-tracker"
    mqtt_reconnect_seconds: int = 5
    redis_url: str = ""
    osrm_base_url: str = "https://router.project-osrm.org"
    osrm_timeout_seconds: float = 10.0
    routes_file: str = ""
    simulation_autostart: bool = True
    simulation_tick_seconds: float = 2.0
    simulation_dwell_seconds: float = 10.0
    walking_speed_kmh: float = 5.0
    log_level: str = "INFO"

    model_config = {"env_prefix": "", "case_sensitive": False}


settings = Settings()
