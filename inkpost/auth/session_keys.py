"""Session dictionary keys."""

SESSION_USER_ID = "user_id"
