"""Habit Farm: grow crops by keeping habits, cook them into recipes."""
