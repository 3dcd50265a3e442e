"""Android platform backend (pyjnius).

Provides :class:`AndroidPlatformFactory` and the individual framework
service wrappers.  Only usable on-device with ``pyjnius`` installed.
"""
