# character_admin/metrics.py
from prometheus_client import Counter

# Record mutations
character_records_renamed_total = Counter(
    "character_records_renamed_total",
    "Number of character updates, labelled by whether the slug changed",
    ["slug_changed"]  # "true" / "false"
)

character_records_deleted_total = Counter(
    "character_records_deleted_total",
    "Number of character delete requests handled"
)

# Ingestion
character_images_ingested_total = Counter(
    "character_images_ingested_total",
    "Number of raw images converted into the store"
)

character_image_ingest_failures_total = Counter(
    "character_image_ingest_failures_total",
    "Number of raw images that failed ingestion",
    ["reason"]  # label: e.g. "invalid_name", "decode", "io"
)
