"""Email notifications for notes and task reminders."""
