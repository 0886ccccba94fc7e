"""Create the tables and the admin account from ADMIN_EMAIL / ADMIN_PASSWORD."""
import logging
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gallery import create_app  # noqa: E402
from gallery.services import ensure_admin  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

# create_app creates the tables and seeds the admin on startup
app = create_app()

with app.app_context():
    email = app.config.get('ADMIN_EMAIL')
    password = app.config.get('ADMIN_PASSWORD')
    if not email or not password:
        print("ADMIN_EMAIL or ADMIN_PASSWORD not set. Admin not created.")
        sys.exit(1)

    admin = ensure_admin(email, password)
    print(f"Admin user ({admin.email}) ready with id {admin.id}")
    print(f"Image storage backend: {app.config['STORAGE_BACKEND']}")
