# === MODULE PURPOSE ===
# Gateway to the Data Platform token service and ESG universe service.
