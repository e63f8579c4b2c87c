from app.domains.sharing.services import SharingService, build_share_link, generate_share_token

__all__ = ["SharingService", "build_share_link", "generate_share_token"]
