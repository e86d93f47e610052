from authlink.infrastructure.auth.di import LinkingInfraProvider

__all__ = ["LinkingInfraProvider"]
