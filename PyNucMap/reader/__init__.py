"""Readers for signal tracks and nucleosome call tables."""
