# jiraproxy HTTP layer
# Created: 2026-10-15
#
# REST endpoints consumed by the board front-end, mounted under /api/.
