"""Background scheduling for the recurring token sync."""
