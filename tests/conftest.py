import os

# Keep @track / span annotation local during tests (no Opik backend calls).
os.environ.setdefault("OPIK_TRACK_DISABLE", "true")
