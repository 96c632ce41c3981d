"""Payment-link relay: creates hosted payment links and verifies provider webhooks."""
