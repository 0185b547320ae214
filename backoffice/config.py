from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    database_url: str = 'sqlite:///./backoffice.db'
    log_level: str = 'INFO'

    session_cookie_name: str = 'backoffice_session'
    session_ttl_minutes: int = 480
    session_cookie_secure: bool = False
    session_cookie_samesite: str = 'lax'

    low_stock_threshold: int = 5

    default_admin_id: str = 'admin-1'
    default_admin_username: str = 'Administrador'
    default_admin_password: str = 'Hsp010305'
    default_admin_name: str = 'Administrador'

    company_lookup_base_url: str = 'https://brasilapi.com.br/api/cnpj/v1'
    company_lookup_timeout_seconds: int = 15

    report_provider: str = 'mock'
    gemini_api_key: str | None = None
    gemini_model: str = 'gemini-2.5-flash'
    gemini_api_base_url: str = 'https://generativelanguage.googleapis.com/v1beta'
    gemini_timeout_seconds: int = 60

    @property
    def database_url_normalized(self) -> str:
        url = self.database_url.strip()
        if url.startswith('postgres://'):
            return 'postgresql+psycopg://' + url[len('postgres://') :]
        if url.startswith('postgresql://'):
            return 'postgresql+psycopg://' + url[len('postgresql://') :]
        return url


settings = Settings()
