"""Notification preferences domain - the operator's email/SMS toggles"""
