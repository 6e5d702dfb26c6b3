# Upstream service integrations.
