"""
Translation of host paths into the toolchain container's mount namespace.
"""
import ntpath
import posixpath

from ..errors import PathTranslationError


def _normalize(path: str) -> str:
    return posixpath.normpath(path.replace(ntpath.sep, posixpath.sep))


def to_container_path(host_path: str, mount_path: str, project_name: str, directory: bool = False) -> str:
    """
    Maps a host path under the bind mount to the same location inside the container.

    The mount path is bound at ``/<project_name>``, so ``<mount>/a/b`` becomes
    ``/<project_name>/a/b``. Separators are normalized to forward slashes
    whatever the host convention is.

    :param host_path: Absolute host path to translate.
    :param mount_path: Absolute host path bound into the container.
    :param project_name: Name of the project, which is also the mount target.
    :param directory: Append a trailing slash to the result.
    :return: The absolute container path.
    :raises PathTranslationError: If host_path is not inside mount_path.
    """
    host = _normalize(host_path)
    mount = _normalize(mount_path)

    # Windows drive letters compare case-insensitively
    if ntpath.splitdrive(host_path)[0] or ntpath.splitdrive(mount_path)[0]:
        host_cmp, mount_cmp = host.lower(), mount.lower()
    else:
        host_cmp, mount_cmp = host, mount

    if host_cmp == mount_cmp:
        relative = ""
    elif host_cmp.startswith(mount_cmp.rstrip("/") + "/"):
        relative = host[len(mount.rstrip("/")) + 1:]
    else:
        raise PathTranslationError(host_path, mount_path)

    container_path = "/" + project_name
    if relative:
        container_path = posixpath.join(container_path, relative)
    if directory and not container_path.endswith("/"):
        container_path += "/"
    return container_path
