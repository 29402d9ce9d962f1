# core/constants.py

# --- Instrument catalogue ---
# Slot requirements and musician profiles may only use these tags.
INSTRUMENTS = [
    "Drums",
    "Bass Guitar",
    "Double Bass",
    "Piano",
    "Electric Piano",
    "Electric Guitar",
    "Acoustic Guitar",
    "Baritone Sax",
    "Tenor Sax",
    "Alto Sax",
    "Soprano Sax",
    "Harmonica",
    "Flute",
    "Trumpet",
    "Trombone",
    "Vocals",
]

# --- Role claims (app_metadata.role or user_metadata.role on the Supabase token) ---
ROLE_MUSICIAN = "musician"
ROLE_VENUE_MANAGER = "venue_manager"
ROLE_ADMIN = "admin"

# --- Invitation codes ---
# No 0/O or 1/I so codes survive being read aloud or typed from a flyer
INVITATION_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
