from django.urls import path
from . import views

app_name = "accounts"

urlpatterns = [
    path("login-register/", views.login_register, name="login_register"),
    path("logout/", views.log_off, name="logout"),
    path("confirm-email/", views.confirm_email, name="confirm_email"),
    path("forgot-password/", views.forgot_password, name="forgot_password"),
    path("forgot-password/confirmation/", views.forgot_password_confirmation,
         name="forgot_password_confirmation"),
    path("reset-password/", views.reset_password, name="reset_password"),
    path("reset-password/confirmation/", views.reset_password_confirmation,
         name="reset_password_confirmation"),
]
