"""
Demo command line application for gatekeeper.
"""
