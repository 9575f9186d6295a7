"""Business services for authentication, attendance and absence requests."""
