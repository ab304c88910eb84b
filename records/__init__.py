"""
Records application package.

Holds the clinical data model (patients, encounters, appointments,
studies and lab results), the REST API over it and the legacy dump
migration pipeline under :mod:`records.seeds`.
"""
