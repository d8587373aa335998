"""pase-lista: attendance registration (roll call) package.

Organized by feature modules (students, attendance, devices, admins) with a
thin Flask controller layer over service/repository layers. Text entering
the system goes through ``common.encoding`` to undo mojibake from CSV files
and form fields of uncertain encoding.
"""
