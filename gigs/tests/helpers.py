# gigs/tests/helpers.py
from django.contrib.auth import get_user_model

from users.models import Musician

User = get_user_model()


def make_musician(username, instruments, email=None):
    user = User.objects.create_user(
        username=username,
        email=email or f"{username}@example.com",
        password="pass123",
    )
    Musician.objects.create(
        user=user,
        name=username.title(),
        email=user.email,
        instruments=list(instruments),
    )
    return user
