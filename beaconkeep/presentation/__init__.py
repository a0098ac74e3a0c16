"""Terminal presentation for alert center signals.

Modules
-------
renderer
    ``AlertRenderer`` subscribes to the ``AlertCenter`` and prints modal
    alerts and transient notifications as Rich panels.
"""
