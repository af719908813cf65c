from django.urls import path

from .views import CancelTicketView, CheckInView, MyTicketsView, TicketDetailView

urlpatterns = [
    path("mine/", MyTicketsView.as_view(), name="my-tickets"),
    path("check-in/", CheckInView.as_view(), name="ticket-check-in"),
    path("<str:code>/", TicketDetailView.as_view(), name="ticket-detail"),
    path("<str:code>/cancel/", CancelTicketView.as_view(), name="ticket-cancel"),
]
