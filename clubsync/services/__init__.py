"""서비스 모듈"""
