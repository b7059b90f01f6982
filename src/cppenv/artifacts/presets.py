"""CMake user presets and the Conan dependency provider they load."""
import json
from typing import Any, Dict

from cppenv.artifacts.files import write_artifact
from cppenv.artifacts.wrappers import C_WRAPPER, CXX_WRAPPER
from cppenv.types import PROJECT_DIR_NAME, Environment

PRESETS_FILE = "CMakeUserPresets.json"
PROVIDER_FILE = "conan_provider.cmake"
PRESETS_SCHEMA_VERSION = 6
PRESET_NAME = "cppenv"
GENERATOR = "Ninja"
SOURCE_DIR_TOKEN = "${sourceDir}"

CONAN_PROVIDER = """# Generated by cppenv. Edit freely: cppenv never overwrites this file.
#
# CMake dependency provider that runs `conan install` the first time a
# find_package() call is made, then resolves packages from Conan's output.
# Loaded through CMAKE_PROJECT_TOP_LEVEL_INCLUDES (see CMakeUserPresets.json).

cmake_minimum_required(VERSION 3.24)

set(CPPENV_CONAN_OUTPUT_DIR "${CMAKE_BINARY_DIR}/conan" CACHE PATH "Conan install folder")
set(CPPENV_CONAN_BUILD "missing" CACHE STRING "Value passed to conan install --build")

function(cppenv_detect_build_type out_var)
    if(CMAKE_BUILD_TYPE)
        set(${out_var} "${CMAKE_BUILD_TYPE}" PARENT_SCOPE)
    else()
        set(${out_var} "Release" PARENT_SCOPE)
    endif()
endfunction()

function(cppenv_conan_install)
    find_program(CPPENV_CONAN_COMMAND conan REQUIRED)

    if(EXISTS "${CMAKE_SOURCE_DIR}/conanfile.py")
        set(conanfile "${CMAKE_SOURCE_DIR}/conanfile.py")
    elseif(EXISTS "${CMAKE_SOURCE_DIR}/conanfile.txt")
        set(conanfile "${CMAKE_SOURCE_DIR}/conanfile.txt")
    else()
        message(STATUS "cppenv: no conanfile found, skipping conan install")
        return()
    endif()

    execute_process(
        COMMAND ${CPPENV_CONAN_COMMAND} profile detect --exist-ok
        OUTPUT_QUIET
        ERROR_QUIET
    )

    cppenv_detect_build_type(build_type)
    message(STATUS "cppenv: conan install (${build_type})")
    execute_process(
        COMMAND ${CPPENV_CONAN_COMMAND} install "${conanfile}"
                --output-folder=${CPPENV_CONAN_OUTPUT_DIR}
                --build=${CPPENV_CONAN_BUILD}
                -s build_type=${build_type}
                -g CMakeDeps
        RESULT_VARIABLE result
    )
    if(NOT result EQUAL 0)
        message(FATAL_ERROR "cppenv: conan install failed (${result})")
    endif()
endfunction()

macro(cppenv_provide_dependency method package_name)
    get_property(cppenv_conan_done GLOBAL PROPERTY CPPENV_CONAN_INSTALLED)
    if(NOT cppenv_conan_done)
        cppenv_conan_install()
        set_property(GLOBAL PROPERTY CPPENV_CONAN_INSTALLED TRUE)
    endif()

    list(FIND CMAKE_PREFIX_PATH "${CPPENV_CONAN_OUTPUT_DIR}" cppenv_prefix_index)
    if(cppenv_prefix_index EQUAL -1)
        list(PREPEND CMAKE_PREFIX_PATH "${CPPENV_CONAN_OUTPUT_DIR}")
    endif()

    find_package(${package_name} ${ARGN} BYPASS_PROVIDER)
endmacro()

cmake_language(
    SET_DEPENDENCY_PROVIDER cppenv_provide_dependency
    SUPPORTED_METHODS FIND_PACKAGE
)
"""


def project_token(name: str) -> str:
    """Path of a file in the cppenv directory relative to the CMake source dir."""
    return f"{SOURCE_DIR_TOKEN}/{PROJECT_DIR_NAME}/{name}"


def build_presets(env: Environment) -> Dict[str, Any]:
    return {
        "version": PRESETS_SCHEMA_VERSION,
        "configurePresets": [
            {
                "name": PRESET_NAME,
                "generator": GENERATOR,
                "binaryDir": f"{SOURCE_DIR_TOKEN}/build",
                "cacheVariables": {
                    "CMAKE_PROJECT_TOP_LEVEL_INCLUDES": project_token(PROVIDER_FILE),
                    "CMAKE_C_COMPILER": project_token(env.profile.script(C_WRAPPER)),
                    "CMAKE_CXX_COMPILER": project_token(env.profile.script(CXX_WRAPPER)),
                },
            }
        ],
    }


def write_dependency_provider(env: Environment) -> bool:
    """Copy the Conan provider into the cppenv directory if it is missing."""
    return write_artifact(env.root / PROVIDER_FILE, CONAN_PROVIDER)


def write_build_presets(env: Environment) -> bool:
    """Write CMakeUserPresets.json if it is missing."""
    content = json.dumps(build_presets(env), indent=2) + "\n"
    return write_artifact(env.root / PRESETS_FILE, content)
