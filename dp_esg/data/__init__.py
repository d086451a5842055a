# === MODULE PURPOSE ===
# Data Platform clients, response models and universe search.
