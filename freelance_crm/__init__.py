"""Freelance CRM - clients, projects, dashboard stats and exports."""

__version__ = "0.1.0"
