"""Test package for The Urinal Game.

Core tests drive the game controller with a fake clock and a recording
renderer. The pygame smoke tests run headlessly using SDL's dummy video and
audio drivers. To run these tests, execute ``pytest`` from the project root.
"""
