"""WanderCrew web application."""
