"""Habit & journal consistency analytics.

Pure calculators (streaks, completion, moods, heatmap) operate on value
types from models; reader and dashboard are the only modules that touch
the database.
"""
