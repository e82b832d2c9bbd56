"""TaskPulse: project and task analytics with PDF report export."""
