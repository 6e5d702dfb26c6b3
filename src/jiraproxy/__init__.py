"""jiraproxy - REST proxy between a board front-end and Jira Cloud."""

__version__ = "0.1.0"
