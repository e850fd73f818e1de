from django import forms
from django.contrib.auth.forms import UserCreationForm, UserChangeForm
from .models import User


class AccountCreationForm(UserCreationForm):
    """
    Admin creation form for workforce accounts.
    Uses email as the login identifier instead of username.
    """

    class Meta:
        model = User
        fields = ('email', 'first_name', 'last_name', 'role', 'status')
        field_classes = {
            'email': forms.EmailField,
        }


class AccountChangeForm(UserChangeForm):

    class Meta:
        model = User
        fields = '__all__'
