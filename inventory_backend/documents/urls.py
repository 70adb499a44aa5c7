# documents/urls.py

from django.urls import path

from documents.views import NextNumberView

urlpatterns = [
    path("next-number/", NextNumberView.as_view(), name="documents-next-number"),
]
