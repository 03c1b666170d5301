"""Time slot configuration domain"""
