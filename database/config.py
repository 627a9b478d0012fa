"""
Supabase connection settings
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()


class SupabaseConfig(BaseSettings):
    """Supabase settings"""

    supabase_url: str = Field(default="", description="Supabase Project URL")
    supabase_key: str = Field(default="", description="Supabase anon key")

    # Tables
    comedians_table: str = Field(default="comedians", description="Comedian rows")
    events_table: str = Field(default="events", description="Event rows")
    performances_table: str = Field(default="performances", description="Performance rows")
    predictions_table: str = Field(default="event_predictions", description="Stored predictions")

    # Paging
    page_size: int = Field(default=1000, ge=1, description="Rows per select request")
    max_retries: int = Field(default=3, ge=1, description="Attempts per page")

    class Config:
        env_prefix = ""
        case_sensitive = False
        extra = "ignore"


# Global settings instance
supabase_config = SupabaseConfig()
