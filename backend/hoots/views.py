from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from . import services
from .serializers import CommentSerializer, HootDetailSerializer, HootListSerializer

# --- Hoot Views ---


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def hoot_list_create(request):
    """
    GET: List every hoot, newest first.
    POST: Create a hoot authored by the caller.
    """
    if request.method == "GET":
        serializer = HootListSerializer(services.list_hoots(), many=True)
        return Response(serializer.data)

    hoot = services.create_hoot(request.user, request.data)
    return Response(HootDetailSerializer(hoot).data, status=status.HTTP_201_CREATED)


@api_view(["GET", "PUT", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def hoot_detail(request, pk):
    """
    GET: Retrieve a hoot with its comments.
    PUT/PATCH: Update the hoot (author only). Both merge the given fields.
    DELETE: Delete the hoot (author only) and return what was deleted.
    """
    if request.method == "GET":
        hoot = services.get_hoot(pk)
        return Response(HootDetailSerializer(hoot).data)

    elif request.method in ["PUT", "PATCH"]:
        hoot = services.update_hoot(request.user, pk, request.data)
        return Response(HootDetailSerializer(hoot).data)

    # DELETE
    hoot = services.delete_hoot(request.user, pk)
    return Response(HootDetailSerializer(hoot).data, status=status.HTTP_200_OK)


# --- Comment Views ---


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def comment_create(request, pk):
    """POST: Append a comment by the caller to hoot ``pk``."""
    comment = services.add_comment(request.user, pk, request.data)
    return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


@api_view(["PUT", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def comment_detail(request, pk, comment_pk):
    """
    PUT/PATCH: Replace the comment text.
    DELETE: Remove the comment.

    Any authenticated user may do either; there is no comment-author check.
    """
    if request.method in ["PUT", "PATCH"]:
        services.update_comment(pk, comment_pk, request.data)
    else:
        services.remove_comment(pk, comment_pk)

    return Response({"message": "Ok"}, status=status.HTTP_200_OK)
