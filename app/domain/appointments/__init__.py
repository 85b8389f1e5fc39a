"""Appointments domain - Public booking intake, numbering and notifications"""
