"""clinsim Gateway -- Session Log Viewer 的 HTTP 宿主"""
