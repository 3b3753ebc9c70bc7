"""Graph API client and request builders."""
