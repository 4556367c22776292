"""Application layer for the dashboard.

Controllers in this package own chart, filter, routing and page-orchestration
state. They patch viewmodels and talk to ports only, so every flow runs
headless under tests and the NiceGUI runtime stays a thin forwarding layer.
"""
