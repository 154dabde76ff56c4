import os
from workhub_api import create_app
from workhub_api.services.admin_setup import ensure_admin

app = create_app()

with app.app_context():
    email = os.getenv("ADMIN_EMAIL", "admin@workhub.local")
    password = os.getenv("ADMIN_PASSWORD", "password")

    user, emp, created = ensure_admin(email, password, name="Admin User")
    print(f"{'Created' if created else 'Reset password for'} {user.email}; employee code {emp.code}")
    print("Admin user ready.")
