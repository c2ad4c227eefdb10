# create.py: set up the database and an admin account
from getpass import getpass
from taskflow import create_app
from taskflow.commands import seed_categories, seed_roles
from taskflow.extensions import db
from taskflow.models.user import ROLE_ADMIN, User
from taskflow.services import store


def main():
    app = create_app()
    with app.app_context():
        db.create_all()
        seed_roles()
        seed_categories()

        email = input("Admin email: ").strip().lower()
        name = input("Full name: ").strip()
        password = getpass("Password: ")

        # Check existing
        if store.get_user_by_email(email):
            print("User with that email already exists.")
            return

        user = User(name=name, email=email, role_id=store.get_role_by_code(ROLE_ADMIN).id)
        user.set_password(password)
        store.add_user(user)
        store.commit()
        print(f"Admin user {email} created successfully.")

if __name__ == "__main__":
    main()
