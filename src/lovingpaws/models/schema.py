"""Table registry and index definitions consumed once at store startup."""

from lovingpaws.models.health_entry import HealthEntry
from lovingpaws.models.pet import Base, Pet
from lovingpaws.models.user import User

# Tables whose rows carry a syncedToCloud flag, keyed by table name
SYNCED_TABLES: dict[str, type[Pet] | type[HealthEntry] | type[User]] = {
    Pet.__tablename__: Pet,
    HealthEntry.__tablename__: HealthEntry,
    User.__tablename__: User,
}

# Created one at a time after the tables; a failing index is not fatal
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_health_entries_pet_id ON health_entries(petId)",
    "CREATE INDEX IF NOT EXISTS idx_health_entries_date ON health_entries(date)",
    "CREATE INDEX IF NOT EXISTS idx_health_entries_type ON health_entries(type)",
    "CREATE INDEX IF NOT EXISTS idx_sync_queue_synced ON sync_queue(synced)",
    "CREATE INDEX IF NOT EXISTS idx_pets_synced ON pets(syncedToCloud)",
    "CREATE INDEX IF NOT EXISTS idx_health_entries_synced ON health_entries(syncedToCloud)",
    "CREATE INDEX IF NOT EXISTS idx_users_synced ON users(syncedToCloud)",
]

__all__ = ["Base", "CREATE_INDEXES", "SYNCED_TABLES"]
