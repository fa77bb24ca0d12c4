"""Administrator dashboards and announcements."""
