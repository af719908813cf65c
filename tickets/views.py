"""
Ticket endpoints: the attendee's own tickets, ticket lookup, door
check-in for organizers and self-service cancellation.
"""
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import is_admin
from .exceptions import TicketStateError
from .models import Ticket
from .serializers import CheckInSerializer, TicketSerializer
from .services import cancel_ticket, check_in


def _can_manage(user, ticket) -> bool:
    return ticket.event.organizer_id == user.pk or is_admin(user)


class MyTicketsView(generics.ListAPIView):
    serializer_class = TicketSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = Ticket.objects.filter(owner=self.request.user, is_active=True).select_related(
            "event", "owner__profile"
        )
        status_param = self.request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)
        return qs.order_by("-purchased_at")


class TicketDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, code):
        ticket = get_object_or_404(Ticket.objects.select_related("event", "owner__profile"), code=code)
        if ticket.owner_id != request.user.pk and not _can_manage(request.user, ticket):
            return Response({"message": "Not authorized to view this ticket"}, status=status.HTTP_403_FORBIDDEN)
        return Response(TicketSerializer(ticket).data)


class CheckInView(APIView):
    """Scan a ticket at the door. Only the event's organizer or an admin."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        code = serializer.validated_data["ticketCode"]

        ticket = Ticket.objects.select_related("event").filter(code=code).first()
        if ticket is None:
            return Response({"valid": False, "message": "Ticket not found"}, status=status.HTTP_404_NOT_FOUND)
        if not _can_manage(request.user, ticket):
            return Response({"message": "Not authorized to check in this ticket"}, status=status.HTTP_403_FORBIDDEN)

        try:
            ticket = check_in(code, checked_in_by=request.user)
        except TicketStateError as exc:
            return Response(
                {"valid": False, "message": exc.message, "ticket": {"code": code, "status": exc.current}},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"valid": True, "message": "Ticket is valid", "ticket": TicketSerializer(ticket).data})


class CancelTicketView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, code):
        ticket = get_object_or_404(Ticket, code=code)
        if ticket.owner_id != request.user.pk:
            return Response({"message": "Not authorized to cancel this ticket"}, status=status.HTTP_403_FORBIDDEN)
        try:
            ticket = cancel_ticket(ticket, request.user)
        except TicketStateError as exc:
            return Response(
                {"message": f"Cannot cancel ticket with status: {exc.current}"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"message": "Ticket cancelled successfully", "ticket": TicketSerializer(ticket).data})
