import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    """
    Global application configuration, loaded from environment variables (with sensible defaults).

    Attributes:
        content_dir (str): Directory holding one markdown document per character.
        images_dir (str): Directory holding the published .webp images.
        raw_images_dir (str): Source directory scanned (recursively) by image ingestion.
        admin_ui_dir (str): Static admin UI served at "/" when the directory exists.
        host (str): Interface the admin server binds to.
        port (int): Port the admin server listens on.
        api_key (str): Required X-API-Key value; empty means open access (local use).
        max_bytes (int): Max HTTP request body size (in bytes).
        webp_quality (int): WebP quality used when ingesting images (0-100).
        webp_method (int): WebP encoder effort (0-6, higher is slower/smaller).
        long_name_threshold (int): Image filenames longer than this get shortened.
        short_max_tokens (int): Underscore tokens kept when shortening a slug.
        short_max_length (int): Hard character cap on a shortened slug.
        log_level (str): Root logging level.
    """
    content_dir: str = os.getenv("CONTENT_DIR", "./src/content/characters")
    images_dir: str = os.getenv("IMAGES_DIR", "./public/images")
    raw_images_dir: str = os.getenv("RAW_IMAGES_DIR", "./Raw Images")
    admin_ui_dir: str = os.getenv("ADMIN_UI_DIR", "./admin/public")

    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", 5174))
    api_key: str = os.getenv("API_KEY", "")
    max_bytes: int = int(os.getenv("MAX_BYTES", 65536))

    webp_quality: int = int(os.getenv("WEBP_QUALITY", 85))
    webp_method: int = int(os.getenv("WEBP_METHOD", 5))

    long_name_threshold: int = int(os.getenv("LONG_NAME_THRESHOLD", 70))
    short_max_tokens: int = int(os.getenv("SHORT_MAX_TOKENS", 6))
    short_max_length: int = int(os.getenv("SHORT_MAX_LENGTH", 40))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
