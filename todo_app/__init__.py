"""Tagged To-Do API: personal tasks with user-owned categories."""
