"""FastAPI adapters for receiving Messenger webhooks."""
