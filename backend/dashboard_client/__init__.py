"""
Headless dashboard client.

A scriptable counterpart of the map dashboard: REST access, the live relay
subscription, marker reconciliation and the map interaction state machine.

Usage:
    from dashboard_client.api import DashboardAPI
    from dashboard_client.session import DashboardSession
"""
