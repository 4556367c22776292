"""ViewModel package for page state and region change notification.

Call context:
    Page controllers in ``geodash/app/pages`` mount page VMs into the
    ``Document`` and patch them after each fetch; ``geodash/web_ui`` renders
    them and forwards user edits back through their callbacks.

Dependencies:
    Domain types and formatting helpers only. No transport or NiceGUI imports.
"""
