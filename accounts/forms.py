from django import forms
from django.contrib.auth.forms import UserCreationForm
from .models import User, Role

class SignUpForm(UserCreationForm):
    full_name = forms.CharField(max_length=150, required=True)
    role = forms.ChoiceField(choices=Role.choices, initial=Role.CUSTOMER)
    phone_number = forms.CharField(max_length=15, required=False)
    sms_opt_in = forms.BooleanField(required=False, initial=True, label='Receive SMS notifications')

    class Meta:
        model = User
        fields = ('email', 'full_name', 'role', 'phone_number', 'sms_opt_in', 'password1', 'password2')

    def clean_phone_number(self):
        phone = self.cleaned_data.get('phone_number', '')
        if not phone:
            return None
        digits = ''.join(c for c in phone if c.isdigit())
        if len(digits) < 10:
            raise forms.ValidationError('Enter a valid mobile number')
        return digits

    def save(self, commit=True):
        user = super().save(commit=False)
        user.username = self.cleaned_data['email']
        if commit:
            user.save()
        return user


class SignInForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput)
